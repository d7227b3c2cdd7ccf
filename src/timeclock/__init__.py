"""Timeclock package.

Feature modules (clock, workday, schedules) each carry a pure domain core,
a service layer that talks to repositories, and a thin Flask controller.
"""
