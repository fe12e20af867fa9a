from . import (  # noqa: F401
    about_command,
    auth_command,
    doctor_command,
    invoke_command,
    methods_command,
    proxy_command,
    tenants_command,
)
