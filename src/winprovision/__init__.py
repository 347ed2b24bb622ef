"""winprovision - Windows image provisioning"""

__version__ = "0.1.0"
