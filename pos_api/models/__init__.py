from pos_api.models.admin import Admin, AdminRole
from pos_api.models.category import Category
from pos_api.models.product import Product
from pos_api.models.order import Order
from pos_api.models.order_item import OrderItem
from pos_api.models.payment_proof import PaymentProof
from pos_api.models.payment_method_setting import PaymentMethodSetting

# add ALL models here
