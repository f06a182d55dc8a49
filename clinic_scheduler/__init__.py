"""
Clinic Scheduling System

FastAPI service for doctors, patients and appointments, with role-scoped
session tokens and a scheduling engine that never double-books a doctor.
"""

__version__ = "1.0.0"
