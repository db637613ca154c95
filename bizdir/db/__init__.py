from .base import Base
from .models.category import Category  # Registers categories table
from .models.business import Business  # Registers businesses table
from .models.feedback import Feedback  # Registers feedback table
