"""
Stratus - deploy services and jobs into application environments.

This package provides the ``stratus deploy`` command and the controller that
decides when environments and workloads must be initialized before a deploy.
"""

__version__ = "0.1.0"
__author__ = "Stratus"
