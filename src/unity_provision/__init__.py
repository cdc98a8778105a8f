"""Unity Editor toolchain provisioning for CI builds."""

__version__ = "0.1.0"
