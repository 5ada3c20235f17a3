"""Attendee status queries."""
