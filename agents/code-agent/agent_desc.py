"""Descriptor of the code agent."""


class AgentDesc:
    name = "code-agent"
    description = "Code agent that turns a plugin request into docs, entities and code"
    support_dialogue = True


default = AgentDesc
