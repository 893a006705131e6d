"""
WMS Modules.

Domain modules over the WMS kernel.  Each module contains:
- Domain models (aggregates and value records)
- Workflows (state machines), where the module has a lifecycle
- ORM persistence models
- A command service and a read-model selector
- A configuration schema

Modules:
- Inbound: purchase orders and the receipts recorded against them
- Inventory: products, locations, and the append-only stock ledger

Receiving goods against a purchase order does not change stock; the two
modules are deliberately independent.
"""
