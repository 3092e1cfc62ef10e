"""
ServiceNow Change Request Automation

A CLI tool that creates ServiceNow change requests, waits for their approval
and closes them, for use as steps of a deployment pipeline.
"""

__version__ = "1.0.0"
