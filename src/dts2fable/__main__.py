from dts2fable.cli import main

main(prog_name="dts2fable")
