"""ReelDrop - extract remote media with yt-dlp and stream it back for a day."""

__version__ = "1.0.0"
