"""
Automation Hub Package

This package contains the AI automation dispatcher used by the freelancer
back-office dashboard:
- auth: Caller identity resolution via Supabase Auth
- billing: Plan entitlement checks for premium automations
- core: Validation, request building, single-flight execution, auto-detect toggle
- presentation: Result normalization and the merged insights timeline
- registry: The catalog of predefined automations
- services: HTTP executor, insight store, notifications, workspace lookups
- tests: Test suites
"""
