# -*- coding: utf-8 -*-
"""Terminal helpers for the interactive commands."""


def color_green(text):
    print(f"\033[32m{text}\033[0m")


def color_red(text):
    print(f"\033[31m{text}\033[0m")


def color_yellow(text):
    print(f"\033[33m{text}\033[0m")


def pause(input_fn=input):
    input_fn("Press Enter to continue...")


def ask_int(prompt, default, input_fn=input):
    """Re-prompt until a non-negative integer is entered; empty means default."""
    while True:
        value = input_fn(f"{prompt} [default: {default}]: ").strip() or str(default)
        if value.isdigit():
            return int(value)
        color_red("Please enter a valid integer.")


def ask_yes_no(prompt, input_fn=input):
    answer = (input_fn(f"{prompt} [y/N]: ").strip() or "N")
    return answer in ("y", "Y")
