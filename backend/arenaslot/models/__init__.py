from .generated import Base, BookingAuditLog, Bookings, Games, SystemSettingsRow

__all__ = ["Base", "BookingAuditLog", "Bookings", "Games", "SystemSettingsRow"]
