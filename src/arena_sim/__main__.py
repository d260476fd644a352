from arena_sim.main import main

main()
