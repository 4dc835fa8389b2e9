"""Minimal dialogue for the code agent."""

from agent_runtime.runtime import DialogueHandler


class DialoguesClass(DialogueHandler):
    model = "deepseek-coder:latest"
    system_prompt = (
        "You are a code agent. Generate code for the user's request. "
        "Only use the tools you are given; never write code outside of them."
    )


default = DialoguesClass
