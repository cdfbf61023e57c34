""" The sensor vocabulary shared by every peer. Requests identify sensors by
    integer type, data batches identify their source by name; this module
    translates between the two.
"""


class DeviceSensor:
    """ A sensor available on some device, identified by its integer *type*
        and a human readable *name*. Two instances are equal if their type
        and name are equal.
    """

    def __init__(self, type, name):

        self.type = int(type)
        self.name = str(name)


    def __eq__(self, other):
        try:
            return self.type == other.type and self.name == other.name
        except AttributeError:
            return NotImplemented


    def __hash__(self):
        return hash((self.type, self.name))


    def __repr__(self):
        return 'DeviceSensor(%d, %r)' % (self.type, self.name)


    def matches(self, identifier):
        """ Return True if *identifier* refers to this sensor: an integer is
            compared to the type, a string to the name. Batch sources are
            names, so a numeric string such as '21' only matches a sensor
            that is actually named that way.
        """

        if isinstance(identifier, DeviceSensor):
            return identifier == self

        if isinstance(identifier, int):
            return identifier == self.type

        return str(identifier) == self.name


# end of class DeviceSensor


# Sensor types as enumerated by the devices participating in this protocol.
# The numbering follows the Android sensor framework, which is what both the
# phone and the wearable peers report.

ACCELEROMETER = DeviceSensor(1, 'ACCELEROMETER')
MAGNETIC_FIELD = DeviceSensor(2, 'MAGNETIC_FIELD')
GYROSCOPE = DeviceSensor(4, 'GYROSCOPE')
LIGHT = DeviceSensor(5, 'LIGHT')
PRESSURE = DeviceSensor(6, 'PRESSURE')
PROXIMITY = DeviceSensor(8, 'PROXIMITY')
GRAVITY = DeviceSensor(9, 'GRAVITY')
LINEAR_ACCELERATION = DeviceSensor(10, 'LINEAR_ACCELERATION')
ROTATION_VECTOR = DeviceSensor(11, 'ROTATION_VECTOR')
RELATIVE_HUMIDITY = DeviceSensor(12, 'RELATIVE_HUMIDITY')
AMBIENT_TEMPERATURE = DeviceSensor(13, 'AMBIENT_TEMPERATURE')
STEP_COUNTER = DeviceSensor(19, 'STEP_COUNTER')
HEART_RATE = DeviceSensor(21, 'HEART_RATE')

known = dict()

for _sensor in (ACCELEROMETER, MAGNETIC_FIELD, GYROSCOPE, LIGHT, PRESSURE,
                PROXIMITY, GRAVITY, LINEAR_ACCELERATION, ROTATION_VECTOR,
                RELATIVE_HUMIDITY, AMBIENT_TEMPERATURE, STEP_COUNTER,
                HEART_RATE):
    known[_sensor.type] = _sensor

del _sensor


def lookup(identifier):
    """ Return the :class:`DeviceSensor` for *identifier*, which may be a
        :class:`DeviceSensor` instance, an integer type, or a sensor name.
        Integer types that are not in the known vocabulary are accepted and
        named after their number; unknown names raise :class:`ValueError`.
    """

    if isinstance(identifier, DeviceSensor):
        return identifier

    if isinstance(identifier, bool):
        raise ValueError('not a sensor identifier: ' + repr(identifier))

    if isinstance(identifier, int):
        try:
            return known[identifier]
        except KeyError:
            return DeviceSensor(identifier, str(identifier))

    name = str(identifier).strip()

    for sensor in known.values():
        if sensor.name == name:
            return sensor

    try:
        type = int(name)
    except ValueError:
        raise ValueError('unknown sensor: ' + repr(identifier))

    return lookup(type)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
