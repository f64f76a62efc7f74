"""Version information for site-deploy package"""

__version__ = "0.4.0"
__version_info__ = (0, 4, 0)
__license__ = "MIT"
