"""VobSrt: convert VobSub (IDX/SUB) bitmap subtitles into SRT text subtitles."""

__version__ = "0.1.0"
