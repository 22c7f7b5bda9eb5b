import json

from django.contrib.contenttypes.models import ContentType
from django.core import serializers

from .models import Activity


def log_activity(user, action_type, instance, description=None):
    """Record an activity entry.

    By default a generic description is generated.  Callers may supply a
    custom ``description`` to override it.  Deleted objects keep a JSON
    snapshot in ``object_repr``; documents with lines include every line.
    """
    if description is None:
        description = f"{instance.__class__.__name__} {instance} was {action_type}."
    object_repr = ''

    if action_type == 'deleted':
        all_lines = getattr(instance, '_all_lines', None)
        lines = all_lines() if all_lines is not None else []
        if lines:
            object_repr = json.dumps({
                'document': serializers.serialize('json', [instance]),
                'items': serializers.serialize('json', lines),
            })
        else:
            object_repr = serializers.serialize('json', [instance])

    if user is not None and not user.is_authenticated:
        user = None

    Activity.objects.create(
        user=user,
        action_type=action_type,
        description=description[:255],
        content_type=ContentType.objects.get_for_model(instance),
        object_id=instance.pk,
        object_repr=object_repr,
    )
