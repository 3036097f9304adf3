from app.api.routes import registrations, excel

__all__ = ['registrations', 'excel']
