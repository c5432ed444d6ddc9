"""
Core upload logic.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
or any infrastructure concerns. The upload pipeline only talks to its
collaborators through small protocols, so it can be tested in isolation.
"""
