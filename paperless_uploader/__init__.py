"""
Paperless Uploader

Watches a consume folder and uploads new documents to Paperless-ngx:
- Startup sweep of files already in the folder
- Live filesystem events via watchdog
- Optional tagging and post-upload delete/move
"""

__version__ = "1.0.0"
