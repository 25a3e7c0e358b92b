"""
Back testing: positions, accounts, brokers and the Backtester that runs a strategy against a feed.
"""
