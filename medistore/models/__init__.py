from medistore.models.product import Product
from medistore.models.order_item import OrderItem
from medistore.models.order import Order
from medistore.models.payment import Payment
from medistore.models.order_event import OrderEvent
from medistore.models.article import Article
from medistore.models.partner import Partner, PartnerSubmission
from medistore.models.webinar import Webinar
from medistore.models.doctor import Doctor

# add ALL models here
