"""
Tests package - Test suite for the AWSCluster operator.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Test data, in-memory storage and scripted subsystem services
"""
