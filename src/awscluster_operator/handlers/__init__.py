"""
Handlers package - Contains all Kopf event handlers.

This package organizes handlers by watched resource:
- awscluster.py: AWSCluster lifecycle and periodic resync
- cluster.py: Cluster pause transitions that re-trigger AWSCluster reconciliation
"""
