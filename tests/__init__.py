"""
Test suite for the Clinic Scheduling System.

Service-level tests for the scheduling engine and API tests through
FastAPI's TestClient.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
