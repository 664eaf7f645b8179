"""
Multi-token reward accrual for share-based staking vaults.
"""
