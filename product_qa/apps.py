import logging

from django.apps import AppConfig


logger = logging.getLogger(__name__)


class ProductQaConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "product_qa"
    verbose_name = "Product QA"

    def ready(self):
        # Register event listeners
        try:
            from product_qa.domain.listeners import register_product_qa_listeners

            register_product_qa_listeners()
        except ImportError as e:
            logger.error(f"Failed to register product QA listeners: {e}")
