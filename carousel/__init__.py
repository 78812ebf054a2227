"""carousel - credential rotation planner for CredHub-backed BOSH deployments."""

__version__ = "0.1.0"
__author__ = "carousel contributors"
__description__ = "Carousel - credential rotation planner"
