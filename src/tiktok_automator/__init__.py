"""TikTok Automator - daily short-video generation and publishing.

Packages:
    content    Topics, niches and templated scripts/captions
    media      Voiceover, stock footage and background music
    video      ffmpeg composition pipeline
    platforms  TikTok credentials and publishing
    cli        Command line interface
"""

__version__ = "0.1.0"
