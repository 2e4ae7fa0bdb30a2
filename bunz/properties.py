import logging


logger = logging.getLogger(__name__)


def get_root_from_chunk(instance):
    root = instance
    while root.father is not None:
        root = root.father

    return root


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    strictly connected to the field named 'length': unpacking reads the
    length from it, setting a new value on 'data' writes the length back.

    The expression follows module resolution

     - '.' as first char indicates a field at the same level (a sibling)
     - otherwise the first component is looked up from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        fields_path = self.expression.split('.')
        # '.miao'.split(".") -> ['', 'miao']
        # 'miao'.split(".") -> ['miao']
        if fields_path[0] == '':
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        for component_name in fields_path:
            field = getattr(field, component_name)

        logger.debug('resolved \'%s\' as %s', self.expression, field.__class__.__name__)

        return field

    def resolve(self, instance):
        return self.resolve_field(instance).value

    def resolve_and_set(self, instance, value):
        self.resolve_field(instance).value = value


class PropertyDescriptor(object):
    """The glue for dependency management: an attribute that can be a plain value
    or a Dependency resolved with respect to the instance's father.

    A field without father cannot resolve anything, in that case the value is None
    and setting it is a no-op."""

    def __init__(self, name: str, _type: type):
        self.name = name
        self.type = _type

    def __get__(self, instance, owner):
        if instance is None:
            return self

        value = instance.__dict__[self.name]

        if isinstance(value, Dependency):
            if instance.father is None:
                return None

            return value.resolve(instance)

        return value

    def __set__(self, instance, value):
        if not isinstance(value, (self.type, Dependency)):
            raise ValueError(f"'{self.name}' must be of type {self.type.__name__} or a Dependency")

        data = instance.__dict__
        attribute = data.get(self.name)

        # only a new Dependency or a plain value replaces what is stored,
        # a plain value assigned over a Dependency is written through it
        if not isinstance(attribute, Dependency) or isinstance(value, Dependency):
            data[self.name] = value
            return

        if instance.father is None:
            return

        attribute.resolve_and_set(instance, value)
