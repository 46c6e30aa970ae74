from sample_app.services.orders import OrderService, OrderServiceImpl
from sample_app.services.users import UserService, UserServiceImpl

__all__ = ["OrderService", "OrderServiceImpl", "UserService", "UserServiceImpl"]
