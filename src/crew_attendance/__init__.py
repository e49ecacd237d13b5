"""Crew attendance ledger.

Feature modules (directory, assignments, attendance, reports) with
service/repository layers and a thin Flask controller on top.
"""
