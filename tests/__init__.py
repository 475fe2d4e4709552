"""
Tests for the DreamBot log monitor.

This package contains tests for:
- Log line classification and message formatting
- Offset tracking and incremental reads
- Webhook delivery
- Directory watching and the monitor loop
- Configuration loading and the CLI
"""
