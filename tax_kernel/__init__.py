"""
Tax Kernel - sell-tax routing in front of an external token ledger.

A policy-enforcement layer with:
- Create-once configuration registry (exemptions, LP destinations)
- Integer-only basis-point fee splitting
- Atomic multi-leg transfers (net + founder fee + marketing fee)
- Ritual-vault-gated burn and one-way mint authority lock
"""

__version__ = "0.1.0"
