"""Purchasing — order lifecycle and fulfillment for courses, events and digital goods."""
