"""Clinic application for the MediSync backend.

This package contains models, services, serializers, views and route
registrations for student health records, appointments, the medicine
inventory and clinic branding.
"""
