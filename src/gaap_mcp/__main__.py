from gaap_mcp.server import main

main()
