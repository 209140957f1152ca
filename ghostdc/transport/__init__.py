"""
Transport layer for local and remote execution.

Provides abstraction for:
- Local command execution
- SSH remote execution (paramiko)
"""

from ghostdc.transport.base import Transport, NullTransport
from ghostdc.transport.local import LocalTransport
from ghostdc.transport.ssh import SSHTransport

__all__ = ["Transport", "NullTransport", "LocalTransport", "SSHTransport"]
