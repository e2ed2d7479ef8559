"""
Watch-and-upload pipeline.

Detects documents in the consume folder, hands them to the Paperless
client and applies the configured post-upload action.
"""
