"""
auth: user authentication module.

Provides:
  • Password hashing (bcrypt)
  • JWT issuance & verification
  • ``local`` and ``jwt`` authentication strategies
  • ``/login`` route and the ``get_current_user`` route guard
"""
