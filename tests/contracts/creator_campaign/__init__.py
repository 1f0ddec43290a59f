# Creator Campaign Service Contracts

"""
Creator Campaign Service Contract Module

This module contains:
- data_contract.py: re-exported service models and the test data factory
"""
