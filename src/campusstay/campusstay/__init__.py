"""CampusStay package.

This package is organized by feature modules (rooms, requests, attendance, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
