"""Command line interface.

Usage:
    tiktok-automator generate [--day N] [--no-publish]
    tiktok-automator compose voice.mp3 clip.mp4 -o final.mp4 [--music bgm.mp3]
    tiktok-automator content [--day N]
    tiktok-automator check
    tiktok-automator music-add track.mp3 --name "Rise Up" --mood energetic
    tiktok-automator token [--refresh | --code CODE]
"""

from .app import app, main

__all__ = ["app", "main"]
