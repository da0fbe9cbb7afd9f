from coffee_menu.models.tenant import Tenant
from coffee_menu.models.coffee_shop import CoffeeShop
from coffee_menu.models.principals import MainAdmin, ShopAdmin
from coffee_menu.models.category import Category
from coffee_menu.models.menu_item import MenuItem
