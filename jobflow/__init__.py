"""
Job Workflow Service.

Job bidding, assignment, staged payment and warranty release for the
service marketplace.
"""

__version__ = "0.1.0"
__author__ = "Marketplace Platform Team"
__description__ = "Job Workflow Service"
