"""
scada/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so that Base.metadata is complete before
create_all_tables() runs.

Models Registered:
-----------------
- Machine: Fleet machines, their API keys and live telemetry state
- User: Human operators (admin / manager / technician) and their tokens
- MaintenanceComment: Append-only maintenance notes per machine
- SpeedHistory: Append-only speed readings per machine

Important:
    Any new model class MUST be imported here.
"""

from scada.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from scada.Models.machine import Machine
from scada.Models.user import User
from scada.Models.maintenance_comment import MaintenanceComment
from scada.Models.speed_history import SpeedHistory
