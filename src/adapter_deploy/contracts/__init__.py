from .models import AdapterDescriptor, PublishMode

__all__ = ["AdapterDescriptor", "PublishMode"]
