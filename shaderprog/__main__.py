"""A very tiny CLI.

Invoke using e.g. ``python -m shaderprog version`` or
``python -m shaderprog generate shaders/Foo.glslp COLOR=1``.
"""

import sys
import argparse

import shaderprog


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    # Defaults and aliases
    if not argv:
        argv = ["help"]
    if argv == ["--version"]:
        argv = ["version"]

    # Let the rest to argparse

    parser = argparse.ArgumentParser(
        prog="shaderprog",
        description="The (very basic) shaderprog CLI",
    )

    parser.add_argument(
        "command",
        action="store",
        help="The command to run: 'help', 'version', 'info' or 'generate'",
    )
    parser.add_argument("file", nargs="?", help="The shader program file")
    parser.add_argument(
        "mutators", nargs="*", help="The mutator values, as NAME=VALUE"
    )
    parser.add_argument(
        "--root", default=".", help="The directory to read the files from"
    )

    args = parser.parse_args(argv)
    command = args.command.lower()

    if command == "help":
        parser.print_help()
    elif command == "version":
        print("shaderprog v" + shaderprog.__version__)
    elif command in ("info", "generate"):
        if not args.file:
            print(f"The '{command}' command needs a file")
            return 1
        try:
            if command == "info":
                print_info(args.root, args.file)
            else:
                print_variant(args.root, args.file, args.mutators)
        except (shaderprog.ShaderProgramError, ValueError) as err:
            print(f"Error: {err}")
            return 1
    else:
        print(f"Invalid command '{command}'")
        return 1
    return 0


def parse_assignment(texts):
    assignment = {}
    for text in texts:
        name, sep, value = text.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got '{text}'")
        assignment[name.strip()] = int(value)
    return assignment


def print_info(root, filename):
    program = shaderprog.parse(filename, root)
    print(f"Program: {program.filename}")
    print(f"Stages: {', '.join(stage.value for stage in program.stages)}")
    print(f"Descriptor set: {program.descriptor_set}")
    print("Mutators:")
    for mutator in program.mutators:
        instanced = " (instanced)" if mutator.instanced else ""
        values = " ".join(str(v) for v in mutator.values)
        print(f"    {mutator.name}: {values}{instanced}")
    print("Inputs:")
    for input in program.inputs:
        if input.is_constant:
            kind = f"constant {input.spec_constant_id}"
        elif input.in_block:
            kind = "instanced uniform" if input.instanced else "uniform"
        else:
            kind = "texture" if input.is_texture else "sampler"
        print(f"    {input.index}: {input.data_type.value} {input.name} ({kind})")


def print_variant(root, filename, mutator_texts):
    program = shaderprog.parse(filename, root)
    variant = shaderprog.generate(program, parse_assignment(mutator_texts))
    for stage, source in variant.sources.items():
        print(f"// ---- {stage.value} ----")
        print(source)
    active = [program.inputs[i].name for i in variant.active_inputs]
    print(f"// Active inputs: {', '.join(active) or 'none'}")


if __name__ == "__main__":
    sys.exit(main())
