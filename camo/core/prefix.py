import re


def makeregprefix(key):
    return re.escape(key)


ROOT_OPERATOR = "::"
HIERARCHICAL_OPERATOR = ":^:"
RELATION_OPERATOR = "//"
PARAMETER_OPERATOR = "%"
TRIGGER_OPERATOR = "->"

STATEMENT_OPENERS = (HIERARCHICAL_OPERATOR, ROOT_OPERATOR)

ROOT_REGPREFIX = makeregprefix(ROOT_OPERATOR)
HIERARCHICAL_REGPREFIX = makeregprefix(HIERARCHICAL_OPERATOR)
RELATION_REGPREFIX = makeregprefix(RELATION_OPERATOR)
PARAMETER_REGPREFIX = makeregprefix(PARAMETER_OPERATOR)
TRIGGER_REGPREFIX = makeregprefix(TRIGGER_OPERATOR)

# bracket pairs: open → close
BRACKETS = {"{": "}", "[": "]", "(": ")"}
