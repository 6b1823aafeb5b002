from .maintenance_order import MaintenanceOrder

__all__ = ['MaintenanceOrder']
