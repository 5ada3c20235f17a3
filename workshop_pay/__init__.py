"""Workshop registration payments: Razorpay orders, webhooks and access links."""

__version__ = "0.1.0"
