# embedded_ansible/lifecycle.py
from enum import Enum


class InstallationState(str, Enum):
    """
    Where the embedded Tower install stands, derived on every call.

    - absent: no usable configuration. Either the SECRET_KEY file or the
      setup-complete marker is missing, or the stored key does not match
      the file. Setup must run from scratch.

    - configured_current: setup completed with the key on file, and the
      version Tower recorded matches the installed package.

    - configured_stale: configured as above, but the installed package is
      a different version than the one setup last ran against. Setup must
      run again.
    """

    ABSENT = "absent"
    CONFIGURED_CURRENT = "configured_current"
    CONFIGURED_STALE = "configured_stale"
