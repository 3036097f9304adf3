from app.models.registration import Registration

__all__ = ['Registration']
