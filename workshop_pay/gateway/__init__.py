"""Razorpay REST client."""

from .client import RazorpayClient


__all__ = ["RazorpayClient"]
