from typing import NewType

RegionId = NewType('RegionId', str)
FactionId = NewType('FactionId', str)
NodeId = NewType('NodeId', str)
ActionId = NewType('ActionId', str)
RuleId = NewType('RuleId', str)
