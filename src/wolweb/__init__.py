"""wolweb: Wake-on-LAN for named machines."""

__version__ = "0.1.0"
