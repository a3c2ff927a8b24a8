from insert_size_plot.cli import main

main()
