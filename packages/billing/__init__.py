"""
Billing package - subscriptions, billing history, payment methods and usage.

Subscription lifecycle, billing-record transitions and plan quota evaluation
live here. Payment capture is external; this package only records outcomes.
"""
