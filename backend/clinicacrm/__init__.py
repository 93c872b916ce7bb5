"""Clinica CRM backend: lead management API for medical clinics."""

__version__ = "1.0.0"
