"""
Shift Board

In-memory back end for a team shift board: sign-in, shift roster, weekly
availability, time-off requests and shift trades, with roster exports.
"""

__version__ = "1.0.0"
__author__ = "Shift Board Team"
