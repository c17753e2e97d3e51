"""
Services Package

Long-lived helpers around the catalog:
- change_notifier: fan-out signal fired after each bulk catalog write
- coin_syncer: background refresh of coins, categories and exchanges
"""
