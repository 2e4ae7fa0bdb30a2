import copy
import logging


logger = logging.getLogger(__name__)


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk: each chunk instance gets its own
    copy of the field declared on the class."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self

        data = instance.__dict__

        if self.field.name not in data:
            logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        data = instance.__dict__

        # if the value is the same type then set as it is
        if isinstance(value, self.field.__class__):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if name in cls.__dict__:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):

    def __new__(cls, name, bases, attrs):
        '''Fields are pulled out of the class attributes and replaced by descriptors,
        remembering the order of declaration (inherited fields come first).'''
        field_attrs = {_k: _v for _k, _v in attrs.items() if isinstance(_v, FieldBase)}
        other_attrs = {_k: _v for _k, _v in attrs.items() if _k not in field_attrs}

        new_cls = super().__new__(cls, name, bases, other_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        for parent in bases:
            if not isinstance(parent, MetaChunk):
                continue
            for obj_name in parent._meta.fields:
                if obj_name not in new_cls._meta.fields:
                    new_cls._meta.fields.append(obj_name)

        for obj_name, obj in field_attrs.items():
            logger.debug('contribute_to_chunk() for field \'%s\'', obj_name)
            new_cls._meta.fields.append(obj_name)
            obj.contribute_to_chunk(new_cls, obj_name)

        return new_cls
